"""
ConverText exceptions.

Only registry misuse and routine misuse raise. Tool argument problems are
returned by the tools themselves as ``Error: ...`` strings, and pipeline or
persistence failures are converted into values by their callers.
"""


class ConverTextError(Exception):
    """Base class for all ConverText errors"""
    pass


class UnknownToolError(ConverTextError):
    """Raised by the registry when a tool name is not in the catalog"""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is not available.")


class RoutineError(ConverTextError):
    """Raised when a routine operation cannot be applied"""
    pass


class RoutineNotFoundError(RoutineError):
    """Raised when an execution id is unknown"""

    def __init__(self, execution_id: str):
        self.execution_id = execution_id
        super().__init__(f"Routine execution '{execution_id}' not found")


class StepNotFoundError(RoutineError):
    """Raised when a step id is not part of the execution"""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"Step '{step_id}' not found")


class StepTransitionError(RoutineError):
    """Raised when a step cannot move to the requested status"""
    pass


class TemplateNotFoundError(RoutineError):
    """Raised when a routine template is unknown to the owner"""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Routine template '{template_id}' not found")


class PersistenceError(ConverTextError):
    """Raised by storage backends; always caught by the routine manager"""
    pass
