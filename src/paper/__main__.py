from paper.cli import main

main()
