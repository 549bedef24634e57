from setuptools import setup

setup(
    name='minic-interpreter',
    version='0.1.0',
    description='Tree-walking evaluator for a minimal C-like language',
    author='MiniC contributors',
    package_dir={'': 'src'},
    packages=['minic', 'minic.evaluator', 'minic.cli'],
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'click>=8.0',
        'rich>=12.0'
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'minic = minic.cli.main:cli'
        ]
    },
    classifiers=[
        'Programming Language :: Python :: 3',
    ],
)
