"""Exceptions raised by the plan compiler."""


class PlanGenerationError(RuntimeError):
    """Configuration problem that prevents a plan from being built."""


class PlanTemplateNotFound(PlanGenerationError):
    """The goal resolved to a template key with no registered template."""

    def __init__(self, template_key: str):
        super().__init__(f"No plan template registered for key '{template_key}'")
        self.template_key = template_key


class UnknownWorkoutBase(PlanGenerationError):
    """A template referenced a base code missing from the workout library."""

    def __init__(self, base: str):
        super().__init__(f"Unknown workout base code '{base}'")
        self.base = base


class NoActivePlan(LookupError):
    """The user has no active training plan."""

    def __init__(self, user_id: str):
        super().__init__(f"No active training plan for user '{user_id}'")
        self.user_id = user_id
