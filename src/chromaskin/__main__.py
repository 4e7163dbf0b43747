from chromaskin.cli import main

main()
