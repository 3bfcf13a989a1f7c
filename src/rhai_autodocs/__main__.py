from rhai_autodocs.cli import main

main()
