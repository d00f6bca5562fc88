"""Pytest-based end-to-end rewrite tests.

Test cases live in generate/*.tests files. Format:

    === test name
    type: TypeName
    package p
    (Go source)
    ---
    (expected Go source, or `error: <message substring>`)
    ---
"""

from pathlib import Path

import pytest

from gocons import DuplicateConstructorError, GoconsError, generate

GENERATE_DIR = Path(__file__).parent / "generate"


def parse_generate_file(path: Path) -> list[tuple[str, str, str, str]]:
    """Parse .tests file into (name, type_name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            type_name = ""
            if i < len(lines) and lines[i].startswith("type:"):
                type_name = lines[i][5:].strip()
                i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines) + "\n"
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, type_name, test_input, expected))
        else:
            i += 1
    return result


def discover_generate_tests() -> list[tuple[str, str, str, str]]:
    """Find all rewrite tests, returns (test_id, type_name, input, expected)."""
    results = []
    for test_file in sorted(GENERATE_DIR.glob("*.tests")):
        for name, type_name, input_code, expected in parse_generate_file(test_file):
            test_id = f"{test_file.stem}/{name}"
            results.append((test_id, type_name, input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over rewrite test files."""
    if "gen_input" in metafunc.fixturenames:
        params = [
            pytest.param(type_name, input_code, expected, id=test_id)
            for test_id, type_name, input_code, expected in discover_generate_tests()
        ]
        metafunc.parametrize("gen_type,gen_input,gen_expected", params)


def test_generate(gen_type: str, gen_input: str, gen_expected: str):
    """Verify the rewritten source matches the expected text exactly and
    that rewriting it again is refused."""
    if gen_expected.startswith("error:"):
        expected_msg = gen_expected[6:].strip()
        with pytest.raises(GoconsError) as excinfo:
            generate(gen_input, gen_type)
        assert expected_msg in str(excinfo.value)
        return
    output = generate(gen_input, gen_type)
    if output != gen_expected + "\n":
        pytest.fail(
            f"Rewrite mismatch:\n--- expected ---\n{gen_expected}\n--- got ---\n{output}"
        )
    with pytest.raises(DuplicateConstructorError):
        generate(output, gen_type)
