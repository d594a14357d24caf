from animlab.cli import main

main()
