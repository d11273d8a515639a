from setuptools import find_namespace_packages, setup

# The packages have no __init__.py files, so they must be
# found as namespace packages.
setup(
    name = 'PngStamp',
    version = '0.1.0',
    description = 'Adds the capture time of VRChat screenshots to their PNG metadata.',
    package_dir = {'': 'src'},
    packages = find_namespace_packages(where = 'src'),
    python_requires = '>=3.8',
    install_requires = [
        'self_documenting_struct',
        'asset_extraction_framework',
    ],
    extras_require = {
        'test': ['pytest'],
    },
    entry_points = {
        'console_scripts': [
            'PngStamp = PngStamp.Engine:main',
        ],
    })
