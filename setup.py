#!/usr/bin/env python
from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(name='epmp',
      version='0.1.0',
      author='Emmanuel Vazquez',
      author_email='emmanuel.vazquez@centralesupelec.fr',
      description='EPmp: the elliptical process micro package',
      long_description=long_description,
      long_description_content_type="text/markdown",
      url='https://github.com/gpmp-dev/epmp',
      classifiers=[
          "Programming Language :: Python :: 3",
          "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
          "Operating System :: OS Independent",
      ],
      packages=['epmp', 'epmp.num', 'epmp.kernel', 'epmp.linalg', 'epmp.core'],
      license='LICENSE.txt',
      install_requires=[
             "numpy",
             "scipy>=1.12.0",
             "joblib",
         ],
      extras_require={
          "torch": ["torch"],
          "test": ["pytest"],
      },
      python_requires=">=3.8",
      )
