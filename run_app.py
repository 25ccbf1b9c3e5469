"""
Launch the Resume Review Streamlit app.
Use: python run_app.py [streamlit options]
"""
import os
import subprocess
import sys

APP_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "resume_review")


def main() -> None:
    # Modules import each other relative to the app directory (config, services, ...)
    os.chdir(APP_DIR)
    cmd = [sys.executable, "-m", "streamlit", "run", "app.py", *sys.argv[1:]]
    raise SystemExit(subprocess.run(cmd).returncode)


if __name__ == "__main__":
    main()
