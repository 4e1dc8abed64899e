from termtype.app import run

run()
