"""refactorkit: migrate hand-written MVVM notification and command boilerplate to CommunityToolkit.Mvvm."""

__version__ = "0.3.0"
