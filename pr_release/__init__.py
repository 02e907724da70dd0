"""pr-release: keep a release pull request (staging -> production) up to date."""

__version__ = "0.1.0"
