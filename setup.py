from setuptools import setup

setup(
    name='atmfjstc-java-codegen',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.java_codegen', 'atmfjstc.lib.java_codegen.ast'],

    install_requires=[
        'atmfjstc-py-lang-utils>=1.3, <2',
        'atmfjstc-ast>=1.1, <2',
        'atmfjstc-text-utils>=1.3, <2',
        'atmfjstc-error-utils>=1, <2',
    ],

    extras_require={
        'test': ['pytest'],
    },

    zip_safe=True,

    description="Declaration model and renderer for generating nicely formatted Java source files",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Code Generators"
    ],
    python_requires='>=3.7',
)
