"""
Client-side agent that keeps a service instance registered with a Eureka registry.
"""

__version__ = '0.1.0'
