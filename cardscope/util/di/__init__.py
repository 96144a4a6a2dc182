from cardscope.util.di.base import Provider
from cardscope.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
