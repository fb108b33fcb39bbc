from setuptools import setup, find_packages

setup(
    name='baggedtrees',
    version='1.0',
    packages=find_packages(exclude=['tests', 'experiments']),
    py_modules=[
        'bagging',
        'criteria',
        'evaluation',
        'exceptions',
        'forest',
        'forest_logging',
        'splitter',
        'tabular',
        'tree_builder',
    ],
    description='Bagged CART decision-tree ensemble for classification and regression',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.10',
    install_requires=[
        'numpy>=1.24',
        'joblib>=1.3',
        'loguru>=0.7',
        'pandas>=2.0',
    ],
    extras_require={
        'test': ['pytest>=7'],
        'datasets': ['scikit-learn>=1.2'],
    },
)
