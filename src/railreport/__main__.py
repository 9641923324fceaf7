"""Allow running railreport as a module: python -m railreport."""

from railreport.cli import main

if __name__ == "__main__":
    main()
