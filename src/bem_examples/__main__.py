"""Entry point for running bem-examples as a module.

Usage:
    python -m bem_examples [command] [options]
"""

from bem_examples.cli.main import app

if __name__ == "__main__":
    app()
