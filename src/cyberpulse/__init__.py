"""CyberPulse Compliance - keyword-driven control evaluation and framework crosswalks."""

__version__ = "1.0.0"
