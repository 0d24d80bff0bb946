#!/usr/bin/env python3
"""批量图片转换与文件夹打包演示脚本。

展示 py_batchbox_mcp 库的核心功能，包括：
- 批量转换 PNG/JPEG 为带底色的 JPEG 并导出为一个 ZIP
- 失败隔离与重新运行
- 按顶层文件夹分别打包
"""

import asyncio
from pathlib import Path

from PIL import Image, ImageDraw

from py_batchbox_mcp import BatchBoxSession, ItemStatus


def get_output_dir(subdir: str = "") -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    project_root = Path(__file__).parent.parent
    output_dir = project_root / "tmp" / "examples"
    if subdir:
        output_dir = output_dir / subdir
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def create_sample_tree() -> Path:
    """创建演示用的目录结构，包含一个损坏的文件"""
    root = get_output_dir("input")
    for album, count in (("Holiday", 3), ("Portraits", 2)):
        album_dir = root / album
        album_dir.mkdir(exist_ok=True)
        for i in range(count):
            img = Image.new("RGBA", (320, 200), (0, 0, 0, 0))
            draw = ImageDraw.Draw(img)
            box = [20 + i * 30, 20, 200 + i * 30, 180]
            draw.ellipse(box, fill=(40 * i, 120, 200, 255))
            img.save(album_dir / f"{album.lower()}_{i}.png")

    (root / "Holiday" / "broken.png").write_bytes(b"not an image")
    return root


async def demo_image_conversion(root: Path) -> None:
    """图片转换演示"""
    print("=== 图片批量转换演示 ===")

    with BatchBoxSession() as session:
        items, rejected = await session.images.add_paths([root])
        print(f"📥 导入 {len(items)} 张图片，拒绝 {len(rejected)} 个文件")

        summary = await session.convert(
            quality_percent=80, scale_percent=50, trim_right=10, matte_color="#FFFFFF"
        )
        print(f"🔄 {summary.get_summary()}")

        for item in session.images.snapshot():
            mark = "✅" if item.status == ItemStatus.COMPLETED else "❌"
            print(f"  {mark} {item.display_name}: {item.error_detail or item.output_size}")

        # 已完成的图片不会重复处理
        rerun = await session.convert()
        print(f"🔁 重新运行: {rerun.get_summary()}")

        path = await session.export_images(get_output_dir("converted"))
        print(f"📦 导出: {path}")


async def demo_folder_zipping(root: Path) -> None:
    """文件夹打包演示"""
    print("\n=== 文件夹打包演示 ===")

    with BatchBoxSession() as session:
        tasks, leftover = await session.folders.add_paths(
            sorted(p for p in root.iterdir() if p.is_dir())
        )
        print(f"📁 创建 {len(tasks)} 个打包任务，{len(leftover)} 个散文件未分组")

        summary = await session.zip_folders()
        print(f"🗜️  {summary.get_summary()}")

        for path in session.export_folders(get_output_dir("zips")):
            print(f"📦 导出: {path}")


def main():
    """主函数"""
    print("🖼️  批量图片转换与文件夹打包演示")
    print("=" * 50)

    root = create_sample_tree()
    try:
        asyncio.run(demo_image_conversion(root))
        asyncio.run(demo_folder_zipping(root))
        print("\n✅ 所有演示完成！")
    except Exception as e:
        print(f"\n❌ 演示过程中出现错误: {e}")
        raise


if __name__ == "__main__":
    main()
