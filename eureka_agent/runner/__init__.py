"""
Eureka agent command-line runner package
"""

from .runner import run_agent

__all__ = ['run_agent']
