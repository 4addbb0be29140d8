"""
k8s-memory-watch: compares observed pod and container memory usage against
declared requests and limits, classifies their health and reports the result.
"""

__version__ = "0.1.0"
