"""Failure type for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing the processor to handle pipeline bugs uniformly.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not a broken input file or a
    failing external tool. It means a stage did not produce the invariants
    it promised.

    Key distinction:
    - ValidationError: User/config error (handled by Pydantic)
    - ToolInvocationError: An external binary failed (dotreel.errors)
    - ContractViolation: Pipeline bug (programmer error)
    """
    pass
