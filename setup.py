from setuptools import setup, find_packages

setup(
    name="audioscope",
    version="0.1.0",
    description="Audio file spectrogram, waveform & transcription viewer for the terminal",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "av>=10.0.0",
        "numpy>=1.21.0",
        "scipy>=1.7.0",
        "google-cloud-speech>=2.16.0",
        "google-auth>=2.10.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "whisper": [
            "faster-whisper>=0.10.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "audioscope=audioscope.main:main",
        ],
    },
)
