"""Lint tasks. Both report every violation first, then fail the task."""

from __future__ import annotations

from ..lint import external
from ..lint.eslint_rules import ESLINT_RULES, JS_RULESET
from ..lint.js import JsChecker
from ..lint.report import report
from ..lint.scss import ScssChecker
from ..lint.stylelint_rules import SCSS_RULESET, STYLELINT_RULES
from ..orchestrator import task
from ..orchestrator.core import RunContext
from ..orchestrator.errors import ConfigurationError
from ..orchestrator.streams import FileSelection
from ..orchestrator.utils import _get, as_list, project_root

SCSS_SOURCES = ["src/scss/**/*.scss", "!src/scss/vendor/**/*.scss"]
JS_SOURCES = ["src/**/*.js"]


@task(name="scss-lint")
def scss_lint(ctx: RunContext):
    """Check SCSS sources (vendor excluded) against the stylelint ruleset."""
    log = ctx.logger("scss-lint")
    root = project_root(ctx.params)
    patterns = as_list(_get(ctx.params, "lint", "scss", "src", default=SCSS_SOURCES))
    files = FileSelection(patterns, root=root).files()
    engine = _get(ctx.params, "lint", "scss", "engine", default="builtin")
    log.info("Linting %d SCSS file(s) with %s", len(files), engine)
    if engine == "builtin":
        checker = ScssChecker(SCSS_RULESET)
        log.debug("Rules without a built-in checker: %s", ", ".join(checker.unsupported))
        violations = checker.check_files(files)
    elif engine == "stylelint":
        violations = external.stylelint(files, STYLELINT_RULES, root)
    else:
        raise ConfigurationError(f"Unknown SCSS lint engine: {engine}")
    report("scss-lint", violations, log)


@task(name="js-lint")
def js_lint(ctx: RunContext):
    """Check site scripts against the eslint ruleset."""
    log = ctx.logger("js-lint")
    root = project_root(ctx.params)
    patterns = as_list(_get(ctx.params, "lint", "js", "src", default=JS_SOURCES))
    files = FileSelection(patterns, root=root).files()
    engine = _get(ctx.params, "lint", "js", "engine", default="builtin")
    log.info("Linting %d JS file(s) with %s", len(files), engine)
    if engine == "builtin":
        violations = JsChecker(JS_RULESET).check_files(files)
    elif engine == "eslint":
        violations = external.eslint(files, ESLINT_RULES, root)
    else:
        raise ConfigurationError(f"Unknown JS lint engine: {engine}")
    report("js-lint", violations, log)
