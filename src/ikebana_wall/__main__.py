from ikebana_wall.cli import main

main()
