# tests/test_scss_lint.py

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from sitebuild.lint import SCSS_RULESET, STYLELINT_RULES, ScssChecker, Violation, external
from sitebuild.orchestrator import TaskFailedError, run
from sitebuild.orchestrator.errors import BuildError, LintError


@pytest.fixture()
def checker() -> ScssChecker:
    return ScssChecker(SCSS_RULESET)


def rules(violations) -> list[str]:
    return [v.rule for v in violations]


def npx_args(script: Path) -> list[str]:
    return (script.parent / "args.txt").read_text(encoding="utf-8").splitlines()


def test_named_color_is_exactly_one_violation(checker: ScssChecker) -> None:
    found = checker.check_text("main.scss", ".alert {\n  color: red;\n}\n")
    assert rules(found) == ["color-named"]
    assert found[0].line == 2
    assert "red" in found[0].message


def test_clean_source_has_no_violations(checker: ScssChecker) -> None:
    assert checker.check_text("main.scss", ".alert {\n  color: #fff;\n}\n") == []


def test_hex_colors_must_be_lowercase(checker: ScssChecker) -> None:
    found = checker.check_text("main.scss", ".alert {\n  color: #FFF;\n}\n")
    assert rules(found) == ["color-hex-case"]


def test_trailing_whitespace(checker: ScssChecker) -> None:
    found = checker.check_text("main.scss", ".alert {\n  color: #fff; \n}\n")
    assert "no-eol-whitespace" in rules(found)


def test_zero_lengths_have_no_unit(checker: ScssChecker) -> None:
    found = checker.check_text("main.scss", ".alert {\n  margin: 0px;\n}\n")
    assert "length-zero-no-unit" in rules(found)


def test_comments_and_strings_are_ignored(checker: ScssChecker) -> None:
    text = '/* red */\n.alert {\n  content: "red";\n}\n'
    assert "color-named" not in rules(checker.check_text("main.scss", text))


def test_missing_end_newline(checker: ScssChecker) -> None:
    found = checker.check_text("main.scss", ".alert {\n  color: #fff;\n}")
    assert rules(found) == ["no-missing-end-of-source-newline"]


def test_scss_lint_task_reports_then_fails(graph, site: Path, params: dict, caplog) -> None:
    (site / "src/scss/main.scss").write_text(".alert {\n  color: red;\n}\n", encoding="utf-8")

    with pytest.raises(TaskFailedError) as exc:
        run(graph, "scss-lint", params)

    error = exc.value.error
    assert isinstance(error, LintError)
    assert [v.rule for v in error.violations] == ["color-named"]
    assert "main.scss:2:" in caplog.text


def test_vendor_only_sources_have_no_violations(graph, tmp_path: Path) -> None:
    root = tmp_path / "vendor-only"
    vendor = root / "src/scss/vendor"
    vendor.mkdir(parents=True)
    (vendor / "legacy.scss").write_text("a{color:red}", encoding="utf-8")
    (vendor / "deep").mkdir()
    (vendor / "deep/more.scss").write_text("b { COLOR: Blue }", encoding="utf-8")

    result = run(graph, "scss-lint", {"project": {"root": str(root)}})

    assert result.ok


def test_unknown_engine_is_a_configuration_error(graph, params: dict) -> None:
    params["lint"] = {"scss": {"engine": "csslint"}}
    with pytest.raises(TaskFailedError) as exc:
        run(graph, "scss-lint", params)
    assert "csslint" in str(exc.value.error)


def test_unsupported_rules_are_listed(checker: ScssChecker) -> None:
    assert "value-keyword-case" in checker.unsupported
    assert "color-named" not in checker.unsupported


STYLELINT_REPORT = json.dumps(
    [
        {
            "source": "/site/src/scss/main.scss",
            "warnings": [
                {
                    "line": 2,
                    "column": 10,
                    "rule": "color-named",
                    "severity": "error",
                    "text": 'Unexpected named color "red" (color-named)',
                },
                {
                    "line": 1,
                    "column": 1,
                    "rule": "max-line-length",
                    "severity": "warning",
                    "text": "Expected line length to be no more than 80 characters (max-line-length)",
                },
            ],
        }
    ]
)


def test_stylelint_report_maps_to_violations(fake_npx, site: Path) -> None:
    npx = fake_npx(STYLELINT_REPORT, code=2)
    files = [site / "src/scss/main.scss"]

    found = external.stylelint(files, STYLELINT_RULES, site, npx=str(npx))

    assert found[0] == Violation(
        file="/site/src/scss/main.scss",
        line=2,
        column=10,
        rule="color-named",
        message='Unexpected named color "red"',
        severity="error",
    )
    assert found[1].severity == "warning"
    args = npx_args(npx)
    assert args[:3] == ["stylelint", "--custom-syntax", "postcss-scss"]
    assert args[-1] == str(files[0])
    config = Path(args[args.index("--config") + 1])
    assert not config.exists()


def test_stylelint_report_on_stderr(fake_npx, site: Path) -> None:
    npx = fake_npx("", stderr=STYLELINT_REPORT, code=2)
    found = external.stylelint([site / "src/scss/main.scss"], STYLELINT_RULES, site, npx=str(npx))
    assert [v.rule for v in found] == ["color-named", "max-line-length"]


def test_crashed_stylelint_fails_instead_of_passing(fake_npx, site: Path) -> None:
    npx = fake_npx("", stderr="npm ERR! could not determine executable to run", code=1)
    with pytest.raises(BuildError, match="npm ERR!"):
        external.stylelint([site / "src/scss/main.scss"], STYLELINT_RULES, site, npx=str(npx))


def test_problems_without_a_report_fail(fake_npx, site: Path) -> None:
    npx = fake_npx("", code=2)
    with pytest.raises(BuildError, match="no report"):
        external.stylelint([site / "src/scss/main.scss"], STYLELINT_RULES, site, npx=str(npx))


def test_missing_npx_is_a_build_error(tmp_path: Path, site: Path) -> None:
    with pytest.raises(BuildError, match="Cannot run"):
        external.stylelint(
            [site / "src/scss/main.scss"], STYLELINT_RULES, site, npx=str(tmp_path / "nope")
        )


def test_start_is_gated_when_stylelint_engine_crashes(
    graph, fake_npx, site: Path, params: dict, monkeypatch
) -> None:
    npx = fake_npx("", stderr="Error: Cannot find module 'stylelint'", code=1)
    monkeypatch.setenv("PATH", f"{npx.parent}{os.pathsep}{os.environ.get('PATH', '')}")
    params["lint"] = {"scss": {"engine": "stylelint"}}

    with pytest.raises(TaskFailedError) as exc:
        run(graph, "start", params)

    assert exc.value.task == "scss-lint"
    assert not (site / "build").exists()
