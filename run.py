#!/usr/bin/env python
"""
Run script for the Orchis console.
Use: python run.py
Or: streamlit run orchis/ui/app.py
"""
import sys
import subprocess


def main():
    """Run the Streamlit app."""
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "orchis/ui/app.py",
        "--server.port=8502",
        "--browser.gatherUsageStats=false",
    ])


if __name__ == "__main__":
    main()
