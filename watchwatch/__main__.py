from watchwatch.main import run

run()
