"""Build a standalone repacker executable with cx_Freeze"""
import sys
from cx_Freeze import setup, Executable

# base="Win32GUI" should be used only for Windows GUI app
base = "Win32GUI" if sys.platform == "win32" else None

setup(
    name="repacker",
    executables=[Executable("run_repacker.py", base=base, target_name="repacker")],
)
