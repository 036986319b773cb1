"""Run the kratix-local command line tool with `python -m kratix_local`."""

from kratix_local.tool.kratix_local import main

if __name__ == "__main__":
    main()
