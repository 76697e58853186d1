import argparse
import json
import logging
import os
import sys

from jose.exceptions import JOSEError

import jades
import verification
from errors import JadesError


ENV_CERTIFICATE_PATH = 'CERTIFICATE_PATH'
ENV_CERTIFICATE_PASSWORD = 'CERTIFICATE_PASSWORD'


def print_to_err(message=''):
    print(message, file=sys.stderr)


def _build_parser():
    parser = argparse.ArgumentParser(description='Create a JAdES Baseline-B signature for a JSON document')
    parser.add_argument('payload', nargs='?',
                        help='JSON file to sign, "-" for stdin; the bundled example document is used if omitted')
    parser.add_argument('--certificate', default=os.environ.get(ENV_CERTIFICATE_PATH),
                        help=f'PKCS#12 file holding the signing certificate (default: ${ENV_CERTIFICATE_PATH})')
    parser.add_argument('--password', default=os.environ.get(ENV_CERTIFICATE_PASSWORD),
                        help=f'PKCS#12 password (default: ${ENV_CERTIFICATE_PASSWORD})')
    parser.add_argument('--output', '-o', help='write the signature here instead of stdout')
    parser.add_argument('--verify', action='store_true', help='verify the signature after creating it')
    parser.add_argument('--verbose', '-v', action='count', default=0)

    return parser


def _read_payload(path):
    if path is None:
        return jades.EXAMPLE_PAYLOAD

    if path == '-':
        return json.load(sys.stdin)

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def main(argv=None):
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING - 10 * min(args.verbose, 2),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr)

    if not args.certificate:
        print_to_err(f'No certificate given; pass --certificate or set {ENV_CERTIFICATE_PATH}')
        return 2

    try:
        with open(args.certificate, 'rb') as f:
            pfx_bytes = f.read()
    except IOError as e:
        print_to_err(f'I/O error reading "{args.certificate}": {e}')
        return 1

    try:
        payload = _read_payload(args.payload)
    except IOError as e:
        print_to_err(f'I/O error reading "{args.payload}": {e}')
        return 1
    except json.JSONDecodeError as e:
        print_to_err(f'Could not parse JSON document "{args.payload}": {e}')
        return 1

    try:
        jws = jades.sign_payload(pfx_bytes, args.password, payload)
    except (JadesError, JOSEError) as e:
        print_to_err(f'Signing failed: {e}')
        return 1

    if args.verify:
        try:
            verified = verification.verify_general(jws)
        except ValueError as e:
            print_to_err(f'Signature verification failed: {e}')
            return 1

        if not verified:
            print_to_err('Signature verification failed')
            return 1

    rendered = jades.render(jws)

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(rendered + '\n')
        except IOError as e:
            print_to_err(f'I/O error writing "{args.output}": {e}')
            return 1
    else:
        print(rendered)

    return 0


if __name__ == '__main__':
    sys.exit(main())
