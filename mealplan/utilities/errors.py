"""Exception types raised by the planning pipeline and the plan lifecycle."""


class MealPlanError(Exception):
    """Base class for all meal plan errors."""


class GenerationError(MealPlanError):
    """The generation service failed or returned output that does not match the schema."""


class EstimationError(MealPlanError):
    """The nutrition estimation service could not produce an estimate."""


class PlanNotFoundError(MealPlanError, LookupError):
    pass


class PlanAccessError(MealPlanError, PermissionError):
    pass


class PlanStateError(MealPlanError, ValueError):
    pass


__all__ = [
    'MealPlanError', 'GenerationError', 'EstimationError',
    'PlanNotFoundError', 'PlanAccessError', 'PlanStateError',
]
