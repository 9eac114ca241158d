#!/usr/bin/env python3
"""
Example script to upload an ISO image unless the storage already has it.

Usage: python upload_iso.py <node> <storage> <file>
"""

import logging
import sys

from proxmox_vm import ProxmoxError, load_connection


def main():
    if len(sys.argv) != 4:
        print("Usage: python upload_iso.py <node> <storage> <file>")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    node, storage, path = sys.argv[1:]

    try:
        conn = load_connection()
        exitstatus = conn.upload_file(path, content_type='iso', node=node, storage=storage)
        if exitstatus is None:
            print("File already present, nothing uploaded.")
        else:
            print(f"Upload finished with exit status: {exitstatus}")
    except ProxmoxError as e:
        print(f"Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
