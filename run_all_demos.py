#!/usr/bin/env python3
"""
Run All Demos - Master launcher for the furnace demonstrations.

This script provides a menu to run individual demos or all of them.
"""

import importlib
import logging
import sys
import traceback
from pathlib import Path

# Ensure we can import from the project
sys.path.insert(0, str(Path(__file__).parent))

DEMOS = {
    '1': ('examples.demo_basic', 'Basic Furnace Demo'),
    '2': ('examples.demo_door_disturbance', 'Door Disturbance Demo'),
    '3': ('examples.demo_live', 'Live Furnace Demo'),
}


def print_header():
    """Print welcome header."""
    print("\n" + "=" * 70)
    print("   FURNACE TEMPERATURE CONTROL - DEMONSTRATION SUITE")
    print("=" * 70)


def print_menu():
    print("\nAvailable Demonstrations:")
    print("-" * 40)
    print("  1. Basic Furnace Demo")
    print("     - PI heat-up to 180 °C")
    print("     - CSV logging")
    print("     - Performance metrics")
    print()
    print("  2. Door Disturbance Demo")
    print("     - P vs PI with the door open")
    print("     - Closed-loop analysis")
    print()
    print("  3. Live Furnace Demo")
    print("     - Real-time ticking")
    print("     - Setpoint slider and door toggle")
    print()
    print("  4. Run ALL demos")
    print("  0. Exit")
    print("-" * 40)


def run_demo(demo_name: str) -> bool:
    """Run a specific demo."""
    if demo_name not in DEMOS:
        print("Invalid selection.")
        return False

    module_name, title = DEMOS[demo_name]

    print(f"\n{'=' * 70}")
    print(f"   Running: {title}")
    print('=' * 70)

    try:
        module = importlib.import_module(module_name)
        module.main()
        return True
    except ImportError as e:
        print(f"Failed to import demo: {e}")
        print("Make sure all dependencies are installed: pip install -e .")
        return False
    except Exception as e:
        print(f"Demo error: {e}")
        traceback.print_exc()
        return False


def run_all_demos():
    print("\n" + "=" * 70)
    print("   RUNNING ALL DEMONSTRATIONS")
    print("=" * 70)
    print("\nNote: Close each plot window to proceed to the next demo.\n")

    for key in DEMOS:
        if not run_demo(key):
            print(f"\nDemo {key} failed. Continue anyway? (y/n): ", end='')
            if input().strip().lower() != 'y':
                break
        print("\n" + "-" * 70)

    print("\n" + "=" * 70)
    print("   ALL DEMONSTRATIONS COMPLETE")
    print("=" * 70)


def main():
    """Main entry point."""
    print_header()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    Path("output").mkdir(exist_ok=True)

    try:
        import numpy
        import matplotlib
        import control
        print("\n✓ All required dependencies are installed.")
    except ImportError as e:
        print(f"\n✗ Missing dependency: {e}")
        print("  Please run: pip install -e .")
        return

    while True:
        print_menu()

        choice = input("\nEnter your choice (0-4): ").strip()

        if choice == '0':
            print("\nGoodbye.\n")
            break
        elif choice == '4':
            run_all_demos()
        elif choice in DEMOS:
            run_demo(choice)
        else:
            print("\nInvalid choice. Please enter 0-4.")


if __name__ == "__main__":
    main()
