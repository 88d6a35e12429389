"\"\"\"Multi-stage admission evaluation engine.\"\"\""

__version__ = "0.1.0"
