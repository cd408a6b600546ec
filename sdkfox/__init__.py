"""sdkfox - a multi-language SDK version manager driven by Lua plugins."""

__version__ = "0.1.0"
__logo__ = "🦊"
