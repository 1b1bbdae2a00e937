
"""
List the entries of a .ico file and the one that would be loaded
"""
import sys
from pathlib import Path

from iconfile import load_icon_candidates
from icocodec.errors import IconLoadError


def describe_icon(ico_path) -> list:
    lines = []
    with open(ico_path, 'rb') as f:
        result = load_icon_candidates(f)

    directory = result.directory
    lines.append(f'Icon type: {directory.image_type} ({len(directory.entries)} of {directory.declared_count} entries valid)')
    for entry in directory.entries:
        lines.append(f'  {entry.width}x{entry.height} @ {entry.bits_per_pixel} bpp, '
                     f'{entry.byte_length} bytes at offset {entry.offset}')
    for failure in result.failures:
        lines.append(f'  failed: {failure}')
    if result.best is not None:
        best = result.best
        lines.append(f'Best entry: {best.width}x{best.height} @ {best.bits_per_pixel} bpp')
    else:
        lines.append('No decodable image!')
    return lines


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print('usage: check_icon.py ICON')
        return 2
    ico_path = Path(argv[0])
    if not ico_path.exists():
        print('Icon file not found!')
        return 1
    try:
        lines = describe_icon(ico_path)
    except IconLoadError as e:
        print(f'Invalid icon file: {e}')
        return 1
    print('\n'.join(lines))
    return 0


if __name__ == '__main__':
    sys.exit(main())
