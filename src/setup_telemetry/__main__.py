from setup_telemetry.cli import run

run()
