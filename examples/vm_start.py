#!/usr/bin/env python3
"""
Example script to start a VM in Proxmox and wait for the task to finish.

Usage: python vm_start.py <vmid>
"""

import logging
import sys

from proxmox_vm import ProxmoxError, TaskTimeout, VmState, load_connection


def main():
    if len(sys.argv) != 2:
        print("Usage: python vm_start.py <vmid>")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    vmid = int(sys.argv[1])

    try:
        conn = load_connection()

        state = conn.get_vm_state(vmid)
        if state == VmState.NOT_CREATED:
            print(f"VM {vmid} does not exist.")
            sys.exit(1)
        if state == VmState.RUNNING:
            print(f"VM {vmid} is already running.")
            return

        print(f"Starting VM {vmid}...")
        exitstatus = conn.start_vm(vmid)
        print(f"Task finished with exit status: {exitstatus}")

    except TaskTimeout as e:
        print(f"Error: timed out ({e.message_key})")
        sys.exit(1)
    except ProxmoxError as e:
        print(f"Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
