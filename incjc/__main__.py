from incjc.cli import run

run()
