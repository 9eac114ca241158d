#!/usr/bin/env python3
"""
Example script to list the cluster nodes, the state of a range of VM ids
and the next free VM id.

Usage: python list_vms.py
"""

import sys

from proxmox_vm import NoVmIdAvailable, ProxmoxError, VmState, load_connection


def main():
    try:
        conn = load_connection()

        print("Nodes:", ", ".join(conn.get_node_list()))
        print("-" * 50)
        for vmid in conn.config.vm_id_range:
            state = conn.get_vm_state(vmid)
            if state != VmState.NOT_CREATED:
                info = conn.get_vm_info(vmid)
                print(f"ID: {vmid}, Node: {info.node}, Type: {info.type}, State: {state.value if state else 'unknown'}")

        try:
            print(f"Next free VM id: {conn.get_free_vm_id()}")
        except NoVmIdAvailable:
            print("No free VM id left in the configured range")

    except ProxmoxError as e:
        print(f"Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
