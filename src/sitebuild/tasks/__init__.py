"""Site task modules live here.

Each module declares its tasks with ``@orchestrator.task(name=..., prerequisites=[...])``;
the CLI imports every module in this package and registers what it finds.

Only shared helpers belong outside a task module; keep one concern per file.
"""
