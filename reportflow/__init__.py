"""reportflow: compile field mappings into render-ready document layouts."""

__version__ = "0.3.0"
