"""
Eureka agent entry point.
"""

import sys
from eureka_agent.runner import run_agent

def main():
    """Entry point for the eureka-agent command."""
    return run_agent()

if __name__ == "__main__":
    sys.exit(main())
