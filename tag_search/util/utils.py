from torchvision import transforms
from typing import Optional
from pathlib import Path

import json


def load_config(config_path: Optional[str] = None) -> dict:
    """Load a service configuration from a JSON file.

    Args:
        config_path: Path to the JSON config file. If None, uses the config.json
            next to this module.

    Returns:
        Dictionary containing the configuration.
    """
    config_path = (
        Path(config_path) if config_path else Path(__file__).parent / "config.json"
    )

    try:
        with config_path.open("r") as f:
            config = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    return config


def get_transform(name: str, image_size: int = 224):
    if name == "imagenet":
        return transforms.Compose(
            [
                transforms.Resize(image_size + 32),
                transforms.CenterCrop(image_size),
                transforms.ToTensor(),
                transforms.Normalize(
                    mean=(0.485, 0.456, 0.406), std=(0.229, 0.224, 0.225)
                ),
            ]
        )
    elif name == "tensor":
        return transforms.Compose([transforms.Resize((image_size, image_size)), transforms.ToTensor()])
    else:
        raise ValueError(f"Transform {name} not found")
