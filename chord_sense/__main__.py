"""Entry point wrapper for ``python -m chord_sense``.

Running the package as a module behaves exactly like the installed
``chord-sense`` console script::

    python -m chord_sense practice --key Random --inversions root,first
"""

from .cli import main

if __name__ == "__main__":
    main()
