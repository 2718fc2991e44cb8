from bitpup.cli import main

main()
