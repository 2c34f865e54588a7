"""
matchcore CLI Entry Point

Allows running the package as a module: python -m matchcore
"""

from matchcore.cli import main

if __name__ == "__main__":
    main()
