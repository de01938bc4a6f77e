from setuptools import setup, find_packages

setup(
    name="invariantsets",
    version="0.1.0",
    author="Bernardo Rivas",
    author_email="bernardo.dopradorivas@utoledo.edu",
    description="Approximation of invariant sets of planar maps by segment iteration and inverse iteration.",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests*', 'examples*']),
    install_requires=[
        "numpy",
        "matplotlib",
        "pyyaml",
        "joblib>=1.3",
        "tqdm",
    ],
    extras_require={
        'test': ['pytest']
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.8',
)
