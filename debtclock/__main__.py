from debtclock.cli import main

main()
