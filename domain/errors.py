"""Domain exceptions raised by data validation, model fitting and statistical tests."""


class DegenerateSampleError(ValueError):
    """A sample contains a single outcome class, so a model or an AUC is undefined."""


class SchemaMismatchError(ValueError):
    """Input records do not match the store-record schema expected by a model."""


class TestPreconditionError(ValueError):
    """A statistical test was called with inputs that violate its assumptions."""

    # keep pytest from collecting this class
    __test__ = False
