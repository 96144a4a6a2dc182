from dishka import Provider as DishkaProvider

from cardscope.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base provider; factories default to the unit-of-work scope."""

    scope = Scope.UOW
