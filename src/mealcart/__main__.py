from mealcart.cli import main

main()
