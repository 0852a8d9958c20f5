"""Model fleet provisioner: resolve, publish and schedule SageMaker inference endpoints."""

__version__ = "1.0.0"
