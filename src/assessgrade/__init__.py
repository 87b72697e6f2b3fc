"""
assessgrade

Answer evaluation engine for auto-generated assessments: grades candidate
answers and rolls verdicts up into topic and type metrics.
"""

__version__ = "1.0.0"
