"""cloudherd - convergent lifecycle workflows for AWS instances, images, DNS and load balancers."""

__version__ = "0.1.0"
