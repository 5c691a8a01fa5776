"""KubeTopo: Kubernetes resource topology graphs for visualization."""

__version__ = "0.1.0"
