"""Test configuration."""

import pytest
from pathlib import Path


PLAYER_GUID = "0a1b2c3d4e5f60718293a4b5c6d7e8f9"
ENEMY_GUID = "1b2c3d4e5f60718293a4b5c6d7e8f90a"
PACKAGE_GUID = "ffffffffffffffffffffffffffffffff"

PLAYER_CS = """using UnityEngine;

public class Player : MonoBehaviour
{
    public static Player Instance;

    void Awake()
    {
        Instance = this;
    }

    void Update()
    {
    }
}
"""

# Line 12 mentions Player.Instance
ENEMY_CS = """using UnityEngine;

public class Enemy : MonoBehaviour
{
    public float speed = 2f;

    // Moves towards the target every frame
    private void Chase()
    {
        var step = speed * Time.deltaTime;
        // Follow the hero
        var target = Player.Instance.transform.position;
        transform.position = Vector3.MoveTowards(transform.position, target, step);
    }
}
"""

CONFIG_CS = """using UnityEngine;

[CreateAssetMenu(menuName = "Game/Settings")]
public class Config : ScriptableObject
{
    public int lives = 3;
}
"""

# Line 5 creates a Config
LOADER_CS = """using UnityEngine;

public static class Loader
{
    public static object Load() => new Config();
}
"""

DEAD_CODE_CS = """namespace Game.Legacy
{
    public class DeadCode
    {
        public int Compute(int x) { return x * 2; }

        public void Update() { }
    }
}
"""

# No type named after the file: cannot be resolved
MISC_CS = """public class Utilities
{
}
"""

SCENE = f"""%YAML 1.1
%TAG !u! tag:unity3d.com,2011:
--- !u!1 &100
GameObject:
  m_ObjectHideFlags: 0
  serializedVersion: 6
  m_Component:
  - component: {{fileID: 101}}
  - component: {{fileID: 102}}
  m_Layer: 0
  m_Name: Hero
  m_TagString: Untagged
--- !u!4 &101
Transform:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 100}}
--- !u!114 &102
MonoBehaviour:
  m_ObjectHideFlags: 0
  m_GameObject: {{fileID: 100}}
  m_Enabled: 1
  m_Script: {{fileID: 11500000, guid: {PLAYER_GUID}, type: 3}}
  m_Name:
--- !u!1 &200
GameObject:
  m_ObjectHideFlags: 0
  m_Component:
  - component: {{fileID: 201}}
  - component: {{fileID: 202}}
  m_Name: Goblin
--- !u!114 &201
MonoBehaviour:
  m_GameObject: {{fileID: 200}}
  m_Enabled: 1
  m_Script: {{fileID: 11500000, guid: {ENEMY_GUID}, type: 3}}
--- !u!114 &202
MonoBehaviour:
  m_GameObject: {{fileID: 200}}
  m_Enabled: 1
  m_Script: {{fileID: 11500000, guid: {PACKAGE_GUID}, type: 3}}
"""


def _meta(guid: str) -> str:
    return f"fileFormatVersion: 2\nguid: {guid}\nMonoImporter:\n  serializedVersion: 2\n"


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a small game project with scripts, meta files and a scene."""
    project = tmp_path / "Game"
    scripts = project / "Assets" / "Scripts"
    scripts.mkdir(parents=True)

    (scripts / "Player.cs").write_text(PLAYER_CS, encoding="utf-8")
    (scripts / "Player.cs.meta").write_text(_meta(PLAYER_GUID), encoding="utf-8")
    (scripts / "Enemy.cs").write_text(ENEMY_CS, encoding="utf-8")
    (scripts / "Enemy.cs.meta").write_text(_meta(ENEMY_GUID), encoding="utf-8")
    (scripts / "Config.cs").write_text(CONFIG_CS, encoding="utf-8")
    (scripts / "Loader.cs").write_text(LOADER_CS, encoding="utf-8")
    (scripts / "DeadCode.cs").write_text(DEAD_CODE_CS, encoding="utf-8")
    (scripts / "Misc.cs").write_text(MISC_CS, encoding="utf-8")

    scenes = project / "Assets" / "Scenes"
    scenes.mkdir(parents=True)
    (scenes / "Main.unity").write_text(SCENE, encoding="utf-8")

    return project


@pytest.fixture
def scripts_dir(sample_project: Path) -> Path:
    """Directory holding the sample scripts."""
    return sample_project / "Assets" / "Scripts"


@pytest.fixture
def scene_file(sample_project: Path) -> Path:
    """The sample scene file."""
    return sample_project / "Assets" / "Scenes" / "Main.unity"
