"""
LeadFlow - Development Runner
Starts the FastAPI backend with auto-reload
"""
import os
import sys
import subprocess

PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
os.chdir(PROJECT_DIR)


def main():
    print("=" * 50)
    print("  LEADFLOW")
    print("  Lead pipeline backend")
    print("=" * 50)
    print("\nBackend API: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")
    print("\nPress Ctrl+C to stop...\n")

    try:
        subprocess.run(
            [sys.executable, "-m", "uvicorn", "leadflow.main:app", "--host", "0.0.0.0", "--port", "8000", "--reload"],
            cwd=PROJECT_DIR,
            env={**os.environ, "PYTHONPATH": PROJECT_DIR}
        )
    except KeyboardInterrupt:
        pass
    print("Done.")


if __name__ == "__main__":
    main()
