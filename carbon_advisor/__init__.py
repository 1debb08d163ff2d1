"""Carbon Advisor — industry benchmark recommendations for energy and carbon reduction."""

__version__ = "0.1.0"
