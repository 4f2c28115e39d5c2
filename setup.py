"""
haltrain setup.py

haltrainパッケージのインストール設定
"""

from setuptools import find_packages, setup

setup(
    name='haltrain',
    version='0.1.0',
    author='haltrain developers',
    description='Early stopping supervisor that halts training and returns the best model',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    keywords='deep learning, early stopping, training, pytorch',
    python_requires='>=3.9',
    install_requires=[
        'torch>=2.0.0',
        'pydantic>=2.0.0',
        'colorlog>=6.0.0',
        'matplotlib>=3.5.0',
    ],
    extras_require={
        'dev': [
            'pytest>=6.0.0',
            'flake8>=3.8.0',
            'black>=21.0.0',
            'isort>=5.8.0',
            'pydocstyle>=6.0.0',
        ]
    },
)
