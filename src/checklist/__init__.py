"""checklist: terminal task tracker with an adaptive split-pane view."""

__version__ = "0.1.0"
