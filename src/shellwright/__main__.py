from shellwright.cli import main

main()
