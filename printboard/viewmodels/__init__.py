"""ViewModel package for presentation state.

Call context:
    ``printboard/app/controller.py`` reads connection and sign-in values from
    ``SettingsVM`` to build adapters.

Dependencies:
    Modules in this package depend on domain types only. I/O adapters and
    use-case orchestration remain outside.
"""
