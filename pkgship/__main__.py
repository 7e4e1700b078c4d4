from pkgship.cli.app import main

main()
