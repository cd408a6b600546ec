"""
Entry point for running sdkfox as a module: python -m sdkfox
"""

from sdkfox.cli.commands import app

if __name__ == "__main__":
    app()
